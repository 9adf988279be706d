import pytest
from click.testing import CliRunner

from twofa.cli import cli
from twofa.storage import StoragePaths


@pytest.fixture
def paths(tmp_path):
    p = StoragePaths(tmp_path / "store")
    p.directory.mkdir()
    return p


@pytest.fixture
def invoke(tmp_path):
    """Run the CLI against an isolated storage directory."""
    runner = CliRunner()
    storage_dir = tmp_path / "cli-store"

    def _invoke(args, input_text=None):
        full_args = ["--storage-dir", str(storage_dir)] + list(args)
        return runner.invoke(cli, full_args, input=input_text, catch_exceptions=False)

    _invoke.paths = StoragePaths(storage_dir)
    return _invoke
