import unittest
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import patch

import pytest

from vc_version_helper.config.loader import Configuration
from vc_version_helper.vcs.git_client import (
    GitClient,
    GitError,
    query_dirty,
    query_repository,
)
from vc_version_helper.versioning.resolver import resolve
from vc_version_helper.versioning.version_model import Described, NotAvailable, QueryFailed


class DummyProc(SimpleNamespace):
    returncode: int = 0
    stdout: str = ""
    stderr: str = ""


class TestGitClient(unittest.TestCase):
    def test_describe_builds_match_pattern(self) -> None:
        calls = []

        def fake_run(self, args, check=True):
            calls.append(args)
            return DummyProc(returncode=0, stdout="v1.2.3-5-gabc1234f9\n", stderr="")

        with patch.object(GitClient, "_run", autospec=True) as mock_run:
            mock_run.side_effect = fake_run
            client = GitClient(Path("/repo"))
            self.assertEqual(client.describe("v", 9), "v1.2.3-5-gabc1234f9")
        self.assertEqual(calls, [["describe", "--match", "v*.*.*", "--tags", "--abbrev=9"]])

    def test_get_commit_hash(self) -> None:
        with patch.object(GitClient, "_run", autospec=True) as mock_run:
            mock_run.return_value = DummyProc(returncode=0, stdout="abc1234\n", stderr="")
            client = GitClient(Path("/repo"))
            self.assertEqual(client.get_commit_hash(7), "abc1234")
            mock_run.assert_called_once_with(client, ["rev-parse", "--short=7", "HEAD"], check=True)

    def test_get_current_branch(self) -> None:
        with patch.object(GitClient, "_run", autospec=True) as mock_run:
            mock_run.return_value = DummyProc(returncode=0, stdout="main\n", stderr="")
            self.assertEqual(GitClient(Path("/repo")).get_current_branch(), "main")

    def test_is_dirty_ignores_untracked(self) -> None:
        cases = [
            ("", False),
            ("?? untracked.txt\n", False),
            (" M modified.py\n", True),
            ("?? new.txt\nD  gone.py\n", True),
        ]
        for output, expected in cases:
            with self.subTest(output=output):
                with patch.object(GitClient, "_run", autospec=True) as mock_run:
                    mock_run.return_value = DummyProc(returncode=0, stdout=output, stderr="")
                    self.assertEqual(GitClient(Path("/repo")).is_dirty(), expected)

    @patch("subprocess.run")
    def test_run_raises_on_failure(self, mock_run) -> None:
        mock_run.return_value = DummyProc(returncode=128, stdout="", stderr="fatal: No names found\n")
        with self.assertRaises(GitError) as ctx:
            GitClient(Path("/repo"))._run(["describe"])
        self.assertEqual(str(ctx.exception), "fatal: No names found")

    @patch("subprocess.run")
    def test_run_without_check_returns_result(self, mock_run) -> None:
        mock_run.return_value = DummyProc(returncode=1, stdout="", stderr="err")
        result = GitClient(Path("/repo"))._run(["describe"], check=False)
        self.assertEqual(result.returncode, 1)

    @patch("subprocess.run")
    def test_run_roots_command_in_repo(self, mock_run) -> None:
        mock_run.return_value = DummyProc(returncode=0, stdout="", stderr="")
        GitClient(Path("/some/repo"))._run(["status", "--porcelain"])
        args = mock_run.call_args[0][0]
        self.assertEqual(args, ["git", "-C", str(Path("/some/repo")), "status", "--porcelain"])

    @patch("subprocess.run")
    def test_run_wraps_os_error(self, mock_run) -> None:
        mock_run.side_effect = FileNotFoundError("git")
        with self.assertRaises(GitError):
            GitClient(Path("/repo"))._run(["status"])


def test_is_repo_requires_root(tmp_path: Path):
    repo = tmp_path / "repo"
    repo.mkdir()
    (repo / ".git").mkdir()
    assert GitClient.is_repo(repo)
    nested = repo / "sub" / "dir"
    nested.mkdir(parents=True)
    assert not GitClient.is_repo(nested)


def test_query_without_git(monkeypatch, tmp_path: Path):
    monkeypatch.setattr(GitClient, "is_available", staticmethod(lambda: False))
    result = query_repository(tmp_path)
    assert isinstance(result, NotAvailable)
    assert "not found" in result.reason


def test_query_not_a_repository(monkeypatch, tmp_path: Path):
    monkeypatch.setattr(GitClient, "is_available", staticmethod(lambda: True))
    result = query_repository(tmp_path)
    assert isinstance(result, NotAvailable)
    assert "not a git repository" in result.reason


def _fake_repo(monkeypatch, tmp_path: Path, responses):
    (tmp_path / ".git").mkdir()
    monkeypatch.setattr(GitClient, "is_available", staticmethod(lambda: True))
    calls = []

    def fake_run(self, args, check=True):
        calls.append(args)
        response = responses[args[0]]
        if isinstance(response, Exception):
            raise response
        return DummyProc(returncode=0, stdout=response, stderr="")

    monkeypatch.setattr(GitClient, "_run", fake_run)
    return calls


def test_query_described(monkeypatch, tmp_path: Path):
    _fake_repo(monkeypatch, tmp_path, {"describe": "v1.0.0\n", "rev-parse": "abc1234f9\n"})
    result = query_repository(tmp_path, prefix="v")
    assert result == Described(raw_text="v1.0.0", commit_hash="abc1234f9")


def test_query_failed_falls_back_to_head_hash(monkeypatch, tmp_path: Path):
    _fake_repo(
        monkeypatch,
        tmp_path,
        {"describe": GitError("fatal: No names found"), "rev-parse": "abc1234f9\n"},
    )
    result = query_repository(tmp_path)
    assert result == QueryFailed(error_text="fatal: No names found", commit_hash="abc1234f9")


def test_query_failed_without_head(monkeypatch, tmp_path: Path):
    _fake_repo(
        monkeypatch,
        tmp_path,
        {"describe": GitError("fatal: No names found"), "rev-parse": GitError("bad revision")},
    )
    result = query_repository(tmp_path)
    assert result == QueryFailed(error_text="fatal: No names found", commit_hash=None)


def test_query_reads_branch_when_requested(monkeypatch, tmp_path: Path):
    (tmp_path / ".git").mkdir()
    monkeypatch.setattr(GitClient, "is_available", staticmethod(lambda: True))
    monkeypatch.setattr(GitClient, "describe", lambda self, prefix, abbrev: "1.0.0")
    monkeypatch.setattr(GitClient, "get_commit_hash", lambda self, length: "abc1234f9")
    monkeypatch.setattr(GitClient, "get_current_branch", lambda self: "main")
    assert query_repository(tmp_path).branch is None
    assert query_repository(tmp_path, branch=True).branch == "main"


def test_query_branch_failure_is_tolerated(monkeypatch, tmp_path: Path):
    _fake_repo(
        monkeypatch,
        tmp_path,
        {"describe": GitError("fatal: No names found"), "rev-parse": GitError("ambiguous argument 'HEAD'")},
    )
    result = query_repository(tmp_path, branch=True)
    assert result == QueryFailed(error_text="fatal: No names found", commit_hash=None, branch=None)


@pytest.mark.parametrize(
    "hash_length, abbrev",
    [(None, "--abbrev=9"), (12, "--abbrev=12"), (2, "--abbrev=4"), (999, "--abbrev=40"), (-3, "--abbrev=40")],
)
def test_query_abbrev(monkeypatch, tmp_path: Path, hash_length, abbrev):
    calls = _fake_repo(monkeypatch, tmp_path, {"describe": "1.0.0", "rev-parse": "abc"})
    query_repository(tmp_path, hash_length=hash_length)
    assert calls[0][-1] == abbrev


def test_query_dirty_swallows_git_errors(monkeypatch, tmp_path: Path):
    def fail(self):
        raise GitError("not a repository")

    monkeypatch.setattr(GitClient, "is_dirty", fail)
    assert query_dirty(tmp_path) is False


# ---------------------------------------------------------------------------
# Real repositories
# ---------------------------------------------------------------------------

def test_real_repo_without_tags(git_repo):
    git_repo.write("README.md", "# Test Project")
    head = git_repo.commit("Initial commit")
    result = query_repository(git_repo.root)
    assert isinstance(result, QueryFailed)
    assert result.commit_hash == head[:9]


def test_real_repo_exact_tag(git_repo):
    git_repo.write("README.md", "# Test Project")
    git_repo.commit("Initial commit")
    git_repo.tag("v1.2.3")
    result = query_repository(git_repo.root, prefix="v")
    assert isinstance(result, Described)
    assert result.raw_text == "v1.2.3"


def test_real_repo_development(git_repo):
    git_repo.write("README.md", "# Test Project")
    git_repo.commit("Initial commit")
    git_repo.tag("1.5.2")
    git_repo.write("feature.txt", "New feature")
    head = git_repo.commit("Add feature")
    result = query_repository(git_repo.root, hash_length=9)
    assert result.raw_text == f"1.5.2-1-g{head[:9]}"


def test_real_repo_ignores_non_version_tags(git_repo):
    git_repo.write("README.md", "# Test Project")
    git_repo.commit("Initial commit")
    git_repo.tag("version-abc")
    assert isinstance(query_repository(git_repo.root), QueryFailed)


def test_real_repo_dirty(git_repo):
    git_repo.write("README.md", "# Test Project")
    git_repo.commit("Initial commit")
    assert query_dirty(git_repo.root) is False
    git_repo.write("untracked.txt", "new")
    assert query_dirty(git_repo.root) is False
    git_repo.write("README.md", "# Modified")
    assert query_dirty(git_repo.root) is True


def test_real_repo_empty_has_no_head(git_repo):
    result = query_repository(git_repo.root)
    assert isinstance(result, QueryFailed)
    assert result.commit_hash is None


def test_real_repo_v_tag_without_prefix(git_repo):
    git_repo.write("README.md", "# Test Project")
    git_repo.commit("Initial commit")
    git_repo.tag("v1.2.3")
    resolved = resolve(Configuration(source_dir=git_repo.root), query_repository(git_repo.root))
    assert resolved.full_version == "1.2.3"
    assert resolved.tag_name == "v1.2.3"
    assert resolved.is_tagged


def test_real_repo_v_tag_development_without_prefix(git_repo):
    git_repo.write("README.md", "# Test Project")
    git_repo.commit("Initial commit")
    git_repo.tag("v2.1.0")
    git_repo.write("feature.txt", "New feature")
    head = git_repo.commit("Add feature")
    resolved = resolve(Configuration(source_dir=git_repo.root), query_repository(git_repo.root))
    assert resolved.full_version == f"2.1.0-dev.1+{head[:9]}"
    assert resolved.tag_name == "v2.1.0"


def test_real_repo_branch(git_repo):
    git_repo.write("README.md", "# Test Project")
    git_repo.commit("Initial commit")
    git_repo.git("checkout", "-b", "feature/versioning")
    result = query_repository(git_repo.root, branch=True)
    assert result.branch == "feature/versioning"
