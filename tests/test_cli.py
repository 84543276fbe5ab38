"""Tests for the changewriter command line interface."""

import json

import pytest

from changewriter.cli import load_commits, load_packages, main
from changewriter.types.base import CommitNote
from changewriter.types.release import PackageInfo


@pytest.fixture
def release_inputs(tmp_path, monkeypatch):
    """Write commits and packages JSON files into a scratch working directory."""
    monkeypatch.chdir(tmp_path)
    for name in ("CHANGEWRITER_REPO_HOST", "CHANGEWRITER_REPO_OWNER", "CHANGEWRITER_REPO_NAME"):
        monkeypatch.delenv(name, raising=False)
    (tmp_path / "aws-lambda").mkdir()

    commits = [
        {
            "type": "feat",
            "scope": "aws-s3",
            "subject": "add bucket policy",
            "header": "feat(aws-s3): add bucket policy",
            "hash": "abcdef1234567890",
        },
        {
            "type": "feat",
            "scope": "aws-lambda",
            "subject": "drop node10",
            "header": "feat(aws-lambda): drop node10",
            "hash": "fedcba9876543210",
            "notes": [{"title": "BREAKING CHANGE", "text": "node10 is gone"}],
        },
    ]
    packages = [
        {"simplified_name": "aws-s3", "location": str(tmp_path / "aws-s3"), "unstable": False},
        {"simplified_name": "aws-lambda", "location": str(tmp_path / "aws-lambda"), "unstable": True},
    ]
    (tmp_path / "commits.json").write_text(json.dumps(commits))
    (tmp_path / "packages.json").write_text(json.dumps(packages))
    return tmp_path


def test_load_inputs(release_inputs):
    commits = load_commits(str(release_inputs / "commits.json"))
    packages = load_packages(str(release_inputs / "packages.json"))

    assert [c.scope for c in commits] == ["aws-s3", "aws-lambda"]
    assert commits[1].notes == [CommitNote("BREAKING CHANGE", "node10 is gone")]
    assert [p.unstable for p in packages] == [False, True]
    assert load_packages(None) == []


def test_main_writes_changelog(release_inputs, capsys):
    exit_code = main(
        ["--commits", "commits.json", "--current-version", "1.2.0", "--new-version", "1.3.0", "--no-date"]
    )

    assert exit_code == 0
    assert capsys.readouterr().out.strip() == "CHANGELOG.md"
    content = (release_inputs / "CHANGELOG.md").read_text()
    assert "## [1.3.0](https://github.com/aws/aws-cdk/compare/v1.2.0...v1.3.0)\n" in content
    assert "add bucket policy" in content


def test_main_separate(release_inputs, capsys):
    exit_code = main(
        [
            "--commits", "commits.json",
            "--packages", "packages.json",
            "--current-version", "1.2.0",
            "--current-alpha-version", "1.2.0-alpha.0",
            "--new-version", "1.3.0",
            "--new-alpha-version", "1.3.0-alpha.0",
            "--experimental-changes-treatment", "separate",
        ]
    )

    assert exit_code == 0
    assert capsys.readouterr().out.split() == [str(release_inputs / "aws-lambda" / "CHANGELOG.md"), "CHANGELOG.md"]
    assert "drop node10" in (release_inputs / "aws-lambda" / "CHANGELOG.md").read_text()
    assert "drop node10" not in (release_inputs / "CHANGELOG.md").read_text()


def test_main_separate_without_alpha_versions_fails(release_inputs):
    exit_code = main(
        [
            "--commits", "commits.json",
            "--packages", "packages.json",
            "--current-version", "1.2.0",
            "--new-version", "1.3.0",
            "--experimental-changes-treatment", "separate",
        ]
    )

    assert exit_code == 1
    assert not (release_inputs / "CHANGELOG.md").exists()


def test_main_dry_run(release_inputs):
    exit_code = main(
        ["--commits", "commits.json", "--current-version", "1.2.0", "--new-version", "1.3.0", "--dry-run"]
    )

    assert exit_code == 0
    assert not (release_inputs / "CHANGELOG.md").exists()


def test_main_missing_commits_file(release_inputs):
    exit_code = main(["--commits", "missing.json", "--current-version", "1.2.0", "--new-version", "1.3.0"])

    assert exit_code == 1


def test_repository_from_environment(release_inputs, monkeypatch):
    monkeypatch.setenv("CHANGEWRITER_REPO_OWNER", "acme")
    monkeypatch.setenv("CHANGEWRITER_REPO_NAME", "infra")

    main(["--commits", "commits.json", "--current-version", "1.2.0", "--new-version", "1.3.0"])

    assert "https://github.com/acme/infra/compare/v1.2.0...v1.3.0" in (release_inputs / "CHANGELOG.md").read_text()


def test_load_packages_accepts_camel_case_keys(tmp_path):
    packages_file = tmp_path / "packages.json"
    packages_file.write_text(
        json.dumps(
            [
                {"simplifiedName": "aws-lambda", "location": "packages/aws-lambda", "unstable": True},
                {"simplified_name": "core", "location": "packages/core"},
            ]
        )
    )

    packages = load_packages(str(packages_file))

    assert packages == [
        PackageInfo(simplified_name="aws-lambda", location="packages/aws-lambda", unstable=True),
        PackageInfo(simplified_name="core", location="packages/core", unstable=False),
    ]
