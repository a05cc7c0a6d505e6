"""Tests for commit_panel.git.git_service against a throwaway repository."""

import shutil
import subprocess
from pathlib import Path

import pytest

from commit_panel.core.changes import Change, UnversionedFile, VcsUser
from commit_panel.git.git_runner import GitCommandRunner, GitRunResult
from commit_panel.git.git_service import GitService, GitServiceError

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")


def _git(cwd, *args):
    return subprocess.run(
        ["git", *args], cwd=str(cwd), check=True, capture_output=True, text=True
    ).stdout


def _write(root: Path, rel_path: str, text: str) -> None:
    path = root / rel_path
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


@pytest.fixture
def empty_repo(tmp_path):
    root = tmp_path / "repo"
    root.mkdir()
    _git(root, "init", "-q")
    _git(root, "symbolic-ref", "HEAD", "refs/heads/main")
    _git(root, "config", "user.name", "Test User")
    _git(root, "config", "user.email", "test@example.com")
    _git(root, "config", "commit.gpgsign", "false")
    return root


@pytest.fixture
def repo(empty_repo):
    _write(empty_repo, "src/a.py", "a = 1\n")
    _write(empty_repo, "src/b.py", "b = 1\n")
    _write(empty_repo, "docs/old.md", "old\n")
    _git(empty_repo, "add", "-A")
    _git(empty_repo, "commit", "-q", "-m", "Initial commit")
    return empty_repo


@pytest.fixture
def service():
    return GitService(command_timeout_seconds=30)


# ---------------------------------------------------------------------------
# Porcelain parsing
# ---------------------------------------------------------------------------

class TestParsePorcelain:
    def test_rename_source_follows_destination(self):
        out = "R  docs/new.md\x00docs/old.md\x00 M src/a.py\x00?? notes.txt\x00"
        changes, unversioned = GitService._parse_porcelain_status(out)
        assert changes == [
            Change("docs/new.md", "R ", original_rel_path="docs/old.md"),
            Change("src/a.py", " M"),
        ]
        assert unversioned == [UnversionedFile("notes.txt")]

    def test_ignored_and_short_entries_are_skipped(self):
        changes, unversioned = GitService._parse_porcelain_status("!! build/\x00\x00x\x00")
        assert changes == []
        assert unversioned == []


# ---------------------------------------------------------------------------
# Status
# ---------------------------------------------------------------------------

@requires_git
class TestReadStatus:
    def test_outside_repository(self, tmp_path, service):
        plain = tmp_path / "plain"
        plain.mkdir()
        status = service.read_status(str(plain))
        assert not status.is_repo
        assert status.changes == []

    def test_reports_changes_and_untracked(self, repo, service):
        _write(repo, "src/a.py", "a = 2\n")
        _write(repo, "notes.txt", "hello\n")
        _git(repo, "mv", "docs/old.md", "docs/new.md")
        status = service.read_status(str(repo))
        assert status.is_repo
        assert status.current_branch == "main"
        assert Change("src/a.py", " M") in status.changes
        renames = [item for item in status.changes if item.is_rename]
        assert renames == [Change("docs/new.md", "R ", original_rel_path="docs/old.md")]
        assert status.unversioned == [UnversionedFile("notes.txt")]

    def test_untracked_filter(self, repo):
        _write(repo, "pkg/__pycache__/mod.pyc", "x")
        _write(repo, "pkg/mod.py", "x = 1\n")
        service = GitService(exclude_untracked_predicate=lambda path: "__pycache__" in Path(path).parts)
        status = service.read_status(str(repo))
        assert status.unversioned == [UnversionedFile("pkg/mod.py")]

    def test_subdirectory_resolves_repo_root(self, repo, service):
        status = service.read_status(str(repo / "src"))
        assert status.repo_root == str(repo.resolve())


# ---------------------------------------------------------------------------
# Commit metadata and preview
# ---------------------------------------------------------------------------

@requires_git
class TestMetadata:
    def test_head_commit_details(self, repo, service):
        details = service.read_head_commit(str(repo))
        assert details.subject == "Initial commit"
        assert details.author == VcsUser("Test User", "test@example.com")
        assert set(details.rel_paths) == {"src/a.py", "src/b.py", "docs/old.md"}
        assert len(details.short_hash) == 8

    def test_no_head_commit_in_empty_repo(self, empty_repo, service):
        assert service.read_head_commit(str(empty_repo)) is None
        assert service.read_head_message(str(empty_repo)) == ""

    def test_configured_user(self, repo, service):
        assert service.read_configured_user(str(repo)) == VcsUser("Test User", "test@example.com")

    def test_diff_for_tracked_change(self, repo, service):
        _write(repo, "src/a.py", "a = 2\n")
        diff = service.read_diff(str(repo), Change("src/a.py"))
        assert "-a = 1" in diff
        assert "+a = 2" in diff

    def test_preview_for_untracked_file(self, repo, service):
        _write(repo, "notes.txt", "hello\n")
        preview = service.read_diff(str(repo), UnversionedFile("notes.txt"))
        assert preview.splitlines() == ["--- /dev/null", "+++ b/notes.txt", "+hello"]

    def test_preview_for_binary_untracked_file(self, repo, service):
        (repo / "blob.bin").write_bytes(b"\x00\x01\x02")
        assert service.read_diff(str(repo), UnversionedFile("blob.bin")) == "Binary file blob.bin"

    def test_missing_repository_raises_not_repo(self, tmp_path, service):
        with pytest.raises(GitServiceError) as exc:
            service.read_head_commit(str(tmp_path / "nope"))
        assert exc.value.kind == "not_repo"


# ---------------------------------------------------------------------------
# Commit
# ---------------------------------------------------------------------------

@requires_git
class TestCommitFiles:
    def test_commits_only_selected_paths(self, repo, service):
        _write(repo, "src/a.py", "a = 2\n")
        _write(repo, "src/b.py", "b = 2\n")
        _write(repo, "notes.txt", "hello\n")
        service.commit_files(str(repo), ["src/a.py", "notes.txt"], "Update a")
        assert _git(repo, "log", "-1", "--format=%s").strip() == "Update a"
        status = service.read_status(str(repo))
        assert [item.rel_path for item in status.changes] == ["src/b.py"]
        assert status.unversioned == []

    def test_previously_staged_files_are_not_committed(self, repo, service):
        _write(repo, "src/a.py", "a = 2\n")
        _write(repo, "src/b.py", "b = 2\n")
        _git(repo, "add", "src/b.py")
        service.commit_files(str(repo), ["src/a.py"], "Only a")
        committed = _git(repo, "show", "--name-only", "--format=", "HEAD").split()
        assert committed == ["src/a.py"]

    def test_rename_commits_both_sides(self, repo, service):
        _git(repo, "mv", "docs/old.md", "docs/new.md")
        service.commit_files(str(repo), ["docs/old.md", "docs/new.md"], "Rename doc")
        assert service.read_status(str(repo)).changes == []
        assert (repo / "docs/new.md").exists()

    def test_author_override(self, repo, service):
        _write(repo, "src/a.py", "a = 3\n")
        service.commit_files(str(repo), ["src/a.py"], "By Ada", author=VcsUser("Ada", "ada@example.com"))
        assert service.read_head_commit(str(repo)).author == VcsUser("Ada", "ada@example.com")

    def test_amend_rewrites_message(self, repo, service):
        head = service.read_head_commit(str(repo)).commit_hash
        service.commit_files(str(repo), [], "Initial commit, reworded", amend=True)
        assert service.read_head_message(str(repo)) == "Initial commit, reworded"
        assert service.read_head_commit(str(repo)).commit_hash != head
        assert _git(repo, "rev-list", "--count", "HEAD").strip() == "1"

    def test_first_commit_in_empty_repo(self, empty_repo, service):
        _write(empty_repo, "README.md", "hi\n")
        _write(empty_repo, "later.txt", "later\n")
        service.commit_files(str(empty_repo), ["README.md"], "First")
        assert service.read_head_commit(str(empty_repo)).rel_paths == ("README.md",)

    def test_empty_message_is_rejected(self, repo, service):
        with pytest.raises(GitServiceError) as exc:
            service.commit_files(str(repo), ["src/a.py"], "   ")
        assert exc.value.kind == "validation"

    def test_no_paths_is_rejected(self, repo, service):
        with pytest.raises(GitServiceError) as exc:
            service.commit_files(str(repo), ["", "  "], "Message")
        assert exc.value.kind == "validation"

    def test_unchanged_path_reports_nothing_to_commit(self, repo, service):
        with pytest.raises(GitServiceError) as exc:
            service.commit_files(str(repo), ["src/a.py"], "No-op")
        assert exc.value.kind == "nothing_to_commit"


# ---------------------------------------------------------------------------
# Runner
# ---------------------------------------------------------------------------

class TestGitRunResult:
    def test_error_detail_prefers_fatal_line(self):
        result = GitRunResult(128, "", "hint: something\nfatal: pathspec 'x' did not match any files\n")
        assert not result.ok
        assert result.error_detail() == "fatal: pathspec 'x' did not match any files"

    def test_error_detail_falls_back_to_last_line(self):
        result = GitRunResult(1, "On branch main\nnothing to commit, working tree clean\n", "")
        assert result.error_detail() == "nothing to commit, working tree clean"

    def test_error_detail_without_output(self):
        assert GitRunResult(1, "", "  \n").error_detail() == "Git command failed."


class TestGitCommandRunner:
    def test_missing_binary_maps_to_git_not_installed(self, tmp_path):
        service = GitService()
        service._runner = GitCommandRunner(git_bin=str(tmp_path / "no-such-git"))
        with pytest.raises(GitServiceError) as exc:
            service.commit_files(str(tmp_path), ["a.py"], "Message")
        assert exc.value.kind == "git_not_installed"

