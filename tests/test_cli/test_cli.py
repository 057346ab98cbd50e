"""Tests for CLI commands."""

import pytest
from click.testing import CliRunner
from PIL import Image

from imgvariants.cli import cli


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def isolated_cache(tmp_path, monkeypatch):
    monkeypatch.setenv("IMGVARIANTS_CACHE_DB_PATH", str(tmp_path / "cli-cache.db"))
    monkeypatch.delenv("IMGVARIANTS_CACHE_DIR", raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def site(tmp_path):
    """A project with one 1600x1200 image and a two-size policy file."""
    root = tmp_path / "site"
    (root / "images").mkdir(parents=True)
    Image.new("RGB", (1600, 1200), (1, 2, 3)).save(root / "images" / "photo.jpg")
    policy = tmp_path / "policy.yaml"
    policy.write_text(
        "resolutions:\n"
        "  - width: 800\n"
        "    extensions: [webp, jpg]\n"
        "  - width: 400\n"
        "    extensions: [webp, jpg]\n"
    )
    return root, policy


def _args(site, tmp_path):
    root, policy = site
    return [
        "--policy", str(policy),
        "--cache-dir", str(tmp_path / "cache"),
        "--project-root", str(root),
    ]


class TestCLIGroup:
    def test_help(self, runner):
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "imgvariants" in result.output

    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output


class TestBuildCommand:
    def test_help(self, runner):
        result = runner.invoke(cli, ["build", "--help"])
        assert result.exit_code == 0
        assert "--policy" in result.output
        assert "--webp" in result.output

    def test_build(self, runner, site, tmp_path):
        root, _ = site
        result = runner.invoke(cli, ["build", str(root / "images" / "photo.jpg"), *_args(site, tmp_path)])
        assert result.exit_code == 0, result.output
        assert "Variants of photo.jpg" in result.output
        family_dir = tmp_path / "cache" / "images" / "photo.jpg" / "image_variants"
        assert (family_dir / "jpg" / "photo-w800.jpg").is_file()
        assert (family_dir / "jpg" / "photo-w400.jpg").is_file()

    def test_build_webp(self, runner, site, tmp_path):
        root, _ = site
        result = runner.invoke(
            cli, ["build", str(root / "images" / "photo.jpg"), "--webp", *_args(site, tmp_path)]
        )
        assert result.exit_code == 0, result.output
        family_dir = tmp_path / "cache" / "images" / "photo.jpg" / "image_variants"
        assert (family_dir / "webp" / "photo-w800.webp").is_file()

    def test_build_without_policy(self, runner, site, tmp_path):
        root, _ = site
        result = runner.invoke(
            cli,
            ["build", str(root / "images" / "photo.jpg"), "--cache-dir", str(tmp_path / "cache")],
        )
        assert result.exit_code == 1
        assert "No image resolutions defined" in result.output

    def test_missing_input(self, runner):
        result = runner.invoke(cli, ["build", "nonexistent.jpg"])
        assert result.exit_code != 0


class TestWarmCommand:
    def test_warm(self, runner, site, tmp_path):
        root, _ = site
        Image.new("RGB", (900, 600)).save(root / "images" / "second.png")
        (root / "images" / "notes.txt").write_text("skip me")
        result = runner.invoke(cli, ["warm", str(root / "images"), *_args(site, tmp_path)])
        assert result.exit_code == 0, result.output
        assert "Processed 2 of 2 images" in result.output

    def test_warm_empty_dir(self, runner, tmp_path):
        empty = tmp_path / "empty"
        empty.mkdir()
        result = runner.invoke(cli, ["warm", str(empty)])
        assert result.exit_code == 0
        assert "No supported images" in result.output


class TestSrcsetCommand:
    def test_srcset(self, runner, site, tmp_path):
        root, _ = site
        result = runner.invoke(
            cli,
            [
                "srcset", str(root / "images" / "photo.jpg"),
                "--url-prefix", "/media", *_args(site, tmp_path),
            ],
        )
        assert result.exit_code == 0, result.output
        assert "/media/images/photo.jpg/image_variants/jpg/photo-w800.jpg 800w" in result.output
        assert "photo-w400.jpg 400w" in result.output


class TestValidatePolicyCommand:
    def test_valid(self, runner, site):
        _, policy = site
        result = runner.invoke(cli, ["validate-policy", str(policy)])
        assert result.exit_code == 0
        assert "Valid policy" in result.output
        assert "2 resolutions" in result.output

    def test_invalid(self, runner, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("sizes: []\n")
        result = runner.invoke(cli, ["validate-policy", str(path)])
        assert result.exit_code == 1
        assert "Invalid policy" in result.output


class TestCacheCommands:
    def test_cache_help(self, runner):
        result = runner.invoke(cli, ["cache", "--help"])
        assert result.exit_code == 0
        assert "stats" in result.output
        assert "clear" in result.output

    def test_cache_stats(self, runner):
        result = runner.invoke(cli, ["cache", "stats"])
        assert result.exit_code == 0
        assert "Cache Statistics" in result.output
        assert "Entries" in result.output

    def test_cache_clear_needs_confirmation(self, runner):
        result = runner.invoke(cli, ["cache", "clear"], input="n\n")
        assert result.exit_code != 0

    def test_cache_clear_with_yes(self, runner):
        result = runner.invoke(cli, ["cache", "clear", "--yes"])
        assert result.exit_code == 0
        assert "Cache cleared" in result.output

    def test_cache_invalidate(self, runner, site, tmp_path):
        root, _ = site
        image = str(root / "images" / "photo.jpg")
        result = runner.invoke(cli, ["srcset", image, *_args(site, tmp_path)])
        assert result.exit_code == 0, result.output

        result = runner.invoke(cli, ["cache", "invalidate", image])
        assert result.exit_code == 0
        assert "Removed 1 cached entries" in result.output
