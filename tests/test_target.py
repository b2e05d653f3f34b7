import tarfile
import zipfile
import pytest
from compliance_inspector.core import target as target_module
from compliance_inspector.core.target import RepositoryTarget, match_glob
from compliance_inspector.exceptions import TargetNotFound
from tests.conftest import COMPLIANT_FILES


@pytest.mark.parametrize("path,pattern,expected", [
    ("main.bicep", "**/*.bicep", True),
    ("infra/modules/a.bicep", "**/*.bicep", True),
    ("infra/main.bicep", "*.py", False),
    ("tests/unit/test_a.py", "tests/**", True),
    (".env", "**/.env", True),
    ("README.md", "README*", True),
])
def test_match_glob(path, pattern, expected):
    assert match_glob(path, pattern) is expected


def test_open_directory_lists_sorted_text_files(compliant_repo):
    target = RepositoryTarget.open(compliant_repo)

    assert target.list_files() == sorted(COMPLIANT_FILES)
    assert target.read_text("README.md").startswith("# Document processor")
    assert len(target) == len(COMPLIANT_FILES)


def test_ignored_binary_and_large_files_are_skipped(make_repo):
    root = make_repo({
        "src/app.py": "print('hi')\n",
        ".git/config": "[core]\n",
        "node_modules/lib/index.js": "module.exports = {}\n",
        "big.txt": "x" * 2048,
    })
    (root / "logo.png").write_bytes(b"\x89PNG\x00\x00binary")

    target = RepositoryTarget.open(root, max_file_bytes=1024)

    assert target.list_files() == ["src/app.py"]
    assert target.skipped == 2


def test_glob_with_exclude(compliant_repo):
    target = RepositoryTarget.open(compliant_repo)

    assert target.glob(["**/*.py"], exclude=["tests/**"]) == ["app/client.py", "app/processor.py"]


def test_missing_target_raises(tmp_path):
    with pytest.raises(TargetNotFound) as exc:
        RepositoryTarget.open(tmp_path / "nowhere")
    assert "nowhere" in str(exc.value)


def test_unsupported_file_target_raises(tmp_path):
    path = tmp_path / "notes.txt"
    path.write_text("hello", encoding="utf-8")

    with pytest.raises(TargetNotFound):
        RepositoryTarget.open(path)


def test_unreadable_directory_raises(monkeypatch, compliant_repo):
    def deny(path):
        raise PermissionError(13, "Permission denied", str(path))

    monkeypatch.setattr(target_module.os, "scandir", deny)

    with pytest.raises(TargetNotFound) as exc:
        RepositoryTarget.open(compliant_repo)
    assert "could not be read" in str(exc.value)


def test_corrupt_archive_raises(tmp_path):
    path = tmp_path / "repo.zip"
    path.write_bytes(b"not a zip file")

    with pytest.raises(TargetNotFound):
        RepositoryTarget.open(path)


def test_zip_archive_matches_directory(tmp_path, compliant_repo):
    archive = tmp_path / "repo.zip"
    with zipfile.ZipFile(archive, "w") as zf:
        for rel, content in COMPLIANT_FILES.items():
            zf.writestr(rel, content)

    from_zip = RepositoryTarget.open(archive)
    from_dir = RepositoryTarget.open(compliant_repo)

    assert from_zip.list_files() == from_dir.list_files()
    assert all(from_zip.read_text(p) == from_dir.read_text(p) for p in from_dir.list_files())


def test_tar_archive_strips_leading_dot(tmp_path, compliant_repo):
    archive = tmp_path / "repo.tar.gz"
    with tarfile.open(archive, "w:gz") as tf:
        tf.add(compliant_repo, arcname=".")

    target = RepositoryTarget.open(archive)

    assert target.list_files() == sorted(COMPLIANT_FILES)
