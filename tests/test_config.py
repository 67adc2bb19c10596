"""Test project context and configuration loading."""

import pytest
import yaml

from fieldblob.config import DatabaseConfig, FieldBlobConfig, load_config, save_config
from fieldblob.constants import DATABASE_PATH_ENV, FIELDBLOB_DIR
from fieldblob.context import ProjectContext
from fieldblob.errors import InvalidStorageProviderError
from fieldblob.policy import StoragePolicy


class TestProjectContext:
    def test_init_and_find_from_subdir(self, tmp_path):
        ProjectContext.init(tmp_path)
        sub = tmp_path / "a" / "b"
        sub.mkdir(parents=True)

        ctx = ProjectContext(sub)

        assert ctx.root == tmp_path.resolve()
        assert ctx.config_path == tmp_path.resolve() / FIELDBLOB_DIR / "config.yaml"

    def test_not_in_project(self, tmp_path):
        with pytest.raises(ValueError, match="Not inside a fieldblob project"):
            ProjectContext(tmp_path)

    def test_is_initialized(self, tmp_path):
        assert not ProjectContext.is_initialized(tmp_path)
        ProjectContext.init(tmp_path)
        assert ProjectContext.is_initialized(tmp_path)


class TestConfig:
    def test_defaults(self):
        config = FieldBlobConfig()
        assert config.storage.provider == "fs"
        assert config.database.gateway == "sqlite"
        assert config.path_prefix == "original"

    def test_save_and_load(self, tmp_path):
        ctx = ProjectContext.init(tmp_path)
        config = FieldBlobConfig(
            storage=StoragePolicy(provider="fs", container="/data/blobs", prefix="files"),
            database=DatabaseConfig(gateway="memory"),
            path_prefix="bin",
        )

        save_config(config, ctx)

        assert load_config(ctx) == config
        raw = yaml.safe_load(ctx.config_path.read_text())
        assert raw["storage"]["container"] == "/data/blobs"

    def test_load_missing(self, tmp_path):
        ctx = ProjectContext.init(tmp_path)
        with pytest.raises(FileNotFoundError):
            load_config(ctx)

    def test_load_partial_file(self, tmp_path):
        ctx = ProjectContext.init(tmp_path)
        ctx.config_path.write_text("path_prefix: images\n")

        config = load_config(ctx)

        assert config.path_prefix == "images"
        assert config.storage == StoragePolicy()

    def test_load_invalid_provider(self, tmp_path):
        ctx = ProjectContext.init(tmp_path)
        ctx.config_path.write_text("storage:\n  provider: ftp\n")

        with pytest.raises(InvalidStorageProviderError):
            load_config(ctx)

    def test_database_path_relative(self, tmp_path, monkeypatch):
        monkeypatch.delenv(DATABASE_PATH_ENV, raising=False)
        config = FieldBlobConfig(database=DatabaseConfig(path="db/refs.sqlite3"))
        assert config.database_path(tmp_path) == tmp_path / "db" / "refs.sqlite3"

    def test_database_path_env_override(self, tmp_path, monkeypatch):
        monkeypatch.setenv(DATABASE_PATH_ENV, str(tmp_path / "override.db"))
        assert FieldBlobConfig().database_path(tmp_path / "root") == tmp_path / "override.db"
