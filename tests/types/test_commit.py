"""Tests for commit value types and package based commit filtering."""

import pytest

from changewriter.types.base import CommitNote, ConventionalCommit, filter_commits


@pytest.fixture
def commit_factory():
    """Factory fixture for creating ConventionalCommit instances."""

    def create_commit(scope=None, subject="do something", type="feat", notes=None, hash="abcdef1234567890"):
        return ConventionalCommit(
            type=type,
            scope=scope,
            subject=subject,
            header=f"{type}({scope}): {subject}" if scope else f"{type}: {subject}",
            hash=hash,
            notes=notes or [],
        )

    return create_commit


def test_packages_from_scope(commit_factory):
    assert commit_factory(scope="aws-s3").packages == ["aws-s3"]
    assert commit_factory(scope="aws-s3, aws-lambda").packages == ["aws-s3", "aws-lambda"]
    assert commit_factory(scope=None).packages == []


def test_breaking_flag(commit_factory):
    assert commit_factory(notes=[CommitNote("BREAKING CHANGE", "removed X")]).breaking
    assert not commit_factory(notes=[CommitNote("Signed-off-by", "someone")]).breaking
    assert not commit_factory().breaking


def test_exclude_packages_drops_commits_only_touching_excluded(commit_factory):
    """Commits associated only with unstable packages are removed, all others stay."""
    only_unstable = commit_factory(scope="aws-lambda", subject="unstable only")
    mixed = commit_factory(scope="aws-lambda,aws-s3", subject="mixed")
    stable = commit_factory(scope="aws-s3", subject="stable only")
    unscoped = commit_factory(scope=None, subject="no scope")

    result = filter_commits([only_unstable, mixed, stable, unscoped], exclude_packages=["aws-lambda"])

    assert result == [mixed, stable, unscoped]


def test_exclude_several_packages(commit_factory):
    commits = [
        commit_factory(scope="aws-lambda"),
        commit_factory(scope="aws-appsync"),
        commit_factory(scope="aws-lambda,aws-appsync"),
        commit_factory(scope="core"),
    ]

    result = filter_commits(commits, exclude_packages=["aws-lambda", "aws-appsync"])

    assert [c.scope for c in result] == ["core"]


def test_include_packages(commit_factory):
    lambda_commit = commit_factory(scope="aws-lambda")
    mixed = commit_factory(scope="aws-s3, aws-lambda")
    other = commit_factory(scope="aws-s3")
    unscoped = commit_factory(scope=None)

    result = filter_commits([lambda_commit, mixed, other, unscoped], include_packages=["aws-lambda"])

    assert result == [lambda_commit, mixed]


def test_scoped_package_names_match_short_scope(commit_factory):
    commit = commit_factory(scope="aws-s3")

    assert filter_commits([commit], include_packages=["@aws-cdk/aws-s3"]) == [commit]
    assert filter_commits([commit], exclude_packages=["@aws-cdk/aws-s3"]) == []


def test_no_filters_keeps_everything(commit_factory):
    commits = [commit_factory(scope="a"), commit_factory(scope=None)]

    assert filter_commits(commits) == commits
    assert filter_commits(commits, exclude_packages=[]) == commits
