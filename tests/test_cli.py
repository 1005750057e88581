"""Unit tests for the CLI commands."""

import json
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner

from pydrivedupes.cli import main
from pydrivedupes.exceptions import (
    DriveAuthenticationError,
    DriveConfigError,
    DriveNetworkError,
    DriveNotFoundError,
)

FOLDERS = {
    "F": {"id": "F", "name": "Docs"},
    "S": {"id": "S", "name": "Sub", "parents": ["F"]},
    "A": {"id": "A", "name": "a", "parents": ["B"]},
    "B": {"id": "B", "name": "b", "parents": ["A"]},
}


def file_resource(file_id, md5, parents=(), size="100"):
    return {
        "id": file_id,
        "name": f"file{file_id}.txt",
        "mimeType": "text/plain",
        "size": size,
        "md5Checksum": md5,
        "parents": list(parents),
    }


def get_file(file_id, fields=None):
    if file_id not in FOLDERS:
        raise DriveNotFoundError(f"Resource not found: {file_id}")
    return FOLDERS[file_id]


@pytest.fixture
def runner():
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def mock_client():
    """Patch DriveClient and return the instance used inside ``with``."""
    with patch("pydrivedupes.cli.DriveClient") as mock_client_class:
        client = MagicMock()
        client.get_file.side_effect = get_file
        mock_client_class.return_value.__enter__.return_value = client
        yield client


class TestMainGroup:
    """Tests for the main CLI group."""

    def test_main_help(self, runner):
        """Test main help shows all commands."""
        result = runner.invoke(main, ["--help"])
        assert result.exit_code == 0
        assert "PyDriveDupes" in result.output
        assert "--access-token" in result.output
        assert "init" in result.output
        assert "find-duplicates" in result.output
        assert "status" in result.output
        assert "path" in result.output


class TestFindDuplicates:
    """Tests for the find-duplicates command."""

    def test_not_authorized(self, runner):
        """Test that a missing token exits with an error."""
        result = runner.invoke(main, ["find-duplicates"])

        assert result.exit_code == 1
        assert "Not authorized" in result.output

    def test_duplicates_with_paths(self, runner, mock_client):
        """Test the basic report: two copies in Docs, one unique file at root."""
        mock_client.list_files.return_value = {
            "files": [
                file_resource("1", "h1", ["F"]),
                file_resource("2", "h1", ["F"]),
                file_resource("3", "h2"),
            ]
        }

        result = runner.invoke(main, ["-t", "token", "find-duplicates"])

        assert result.exit_code == 0, result.output
        assert "Hash: h1" in result.output
        assert "h2" not in result.output
        assert "ID: 1, Name: file1.txt, Size: 100, Path: Docs" in result.output
        assert "ID: 2, Name: file2.txt, Size: 100, Path: Docs" in result.output
        mock_client.get_file.assert_called_once_with("F", fields="id, name, parents")

    def test_no_duplicates(self, runner, mock_client):
        """Test output when every checksum is unique."""
        mock_client.list_files.return_value = {
            "files": [file_resource("1", "h1"), file_resource("2", "h2")]
        }

        result = runner.invoke(main, ["-t", "token", "find-duplicates"])

        assert result.exit_code == 0
        assert "No duplicate files found." in result.output

    def test_empty_checksums_not_reported(self, runner, mock_client):
        """Test that files without checksums are never grouped."""
        mock_client.list_files.return_value = {
            "files": [file_resource("1", ""), file_resource("2", "")]
        }

        result = runner.invoke(main, ["-t", "token", "find-duplicates"])

        assert "No duplicate files found." in result.output

    def test_unresolved_paths_still_reported(self, runner, mock_client):
        """Test that missing and cyclic parents print the unresolved marker."""
        mock_client.list_files.return_value = {
            "files": [
                file_resource("1", "h1", ["S"]),
                file_resource("2", "h1", ["missing"]),
                file_resource("3", "h1", ["A"]),
            ]
        }

        result = runner.invoke(main, ["-t", "token", "find-duplicates"])

        assert result.exit_code == 0, result.output
        assert "Path: Docs/Sub" in result.output
        assert "ID: 2" in result.output
        assert "ID: 3" in result.output
        assert result.output.count("<unresolved>") == 2
        assert "Cycle detected" in result.output

    def test_json_output(self, runner, mock_client):
        """Test the JSON report."""
        mock_client.list_files.return_value = {
            "files": [
                file_resource("1", "h1", ["F"]),
                file_resource("2", "h1"),
            ]
        }

        result = runner.invoke(main, ["-t", "token", "--json", "find-duplicates"])

        assert result.exit_code == 0, result.output
        report = json.loads(result.output)
        assert report["total_groups"] == 1
        files = report["duplicate_groups"][0]["files"]
        assert [f["path"] for f in files] == ["Docs", "root"]

    def test_no_paths_skips_folder_lookups(self, runner, mock_client):
        """Test that --no-paths reports without any folder lookups."""
        mock_client.list_files.return_value = {
            "files": [
                file_resource("1", "h1", ["F"]),
                file_resource("2", "h1", ["F"]),
            ]
        }

        result = runner.invoke(main, ["-t", "token", "find-duplicates", "--no-paths"])

        assert result.exit_code == 0
        assert "ID: 1" in result.output
        assert "Path:" not in result.output
        mock_client.get_file.assert_not_called()

    def test_min_size(self, runner, mock_client):
        """Test that --min-size drops small groups."""
        mock_client.list_files.return_value = {
            "files": [
                file_resource("1", "small", size="10"),
                file_resource("2", "small", size="10"),
                file_resource("3", "big", size="5000"),
                file_resource("4", "big", size="5000"),
            ]
        }

        result = runner.invoke(
            main, ["-t", "token", "find-duplicates", "--min-size", "1000"]
        )

        assert "Hash: big" in result.output
        assert "Hash: small" not in result.output

    def test_include_trashed(self, runner, mock_client):
        """Test that --include-trashed lists without the trashed filter."""
        mock_client.list_files.return_value = {"files": []}

        runner.invoke(main, ["-t", "token", "find-duplicates", "--include-trashed"])

        assert mock_client.list_files.call_args.kwargs["query"] is None

    def test_listing_failure_is_fatal(self, runner, mock_client):
        """Test that a failed listing aborts before any resolution."""
        mock_client.list_files.side_effect = DriveNetworkError("Network error: down")

        result = runner.invoke(main, ["-t", "token", "find-duplicates"])

        assert result.exit_code == 1
        assert "Unable to retrieve files" in result.output
        mock_client.get_file.assert_not_called()


class TestStatusCommand:
    """Tests for the status command."""

    def test_status(self, runner, mock_client):
        """Test status shows user and quota."""
        mock_client.get_about.return_value = {
            "user": {"displayName": "Test User", "emailAddress": "test@example.com"},
            "storageQuota": {"usage": "1048576", "limit": "16106127360"},
        }

        result = runner.invoke(main, ["-t", "token", "status"])

        assert result.exit_code == 0, result.output
        assert "Test User" in result.output
        assert "test@example.com" in result.output
        assert "1.0 MB" in result.output
        assert "15.0 GB" in result.output

    def test_status_unlimited_quota(self, runner, mock_client):
        """Test status for accounts without a storage limit."""
        mock_client.get_about.return_value = {
            "user": {"displayName": "Test User"},
            "storageQuota": {"usage": "0"},
        }

        result = runner.invoke(main, ["-t", "token", "status"])

        assert "unlimited" in result.output

    def test_status_json(self, runner, mock_client):
        """Test status in JSON format."""
        about = {"user": {"displayName": "Test User"}, "storageQuota": {}}
        mock_client.get_about.return_value = about

        result = runner.invoke(main, ["-t", "token", "--json", "status"])

        assert json.loads(result.output) == about

    def test_status_invalid_token(self, runner, mock_client):
        """Test status with a rejected token."""
        mock_client.get_about.side_effect = DriveAuthenticationError(
            "Invalid or expired access token"
        )

        result = runner.invoke(main, ["-t", "bad", "status"])

        assert result.exit_code == 1
        assert "Invalid or expired access token" in result.output


class TestPathCommand:
    """Tests for the path command."""

    def test_path(self, runner, mock_client):
        """Test resolving the folder path of file IDs."""
        files = {
            "1": file_resource("1", "h1", ["S"]),
            "2": file_resource("2", "h2"),
        }
        mock_client.get_file.side_effect = lambda file_id, fields=None: (
            files[file_id] if file_id in files else get_file(file_id, fields)
        )

        result = runner.invoke(main, ["-t", "token", "path", "1", "2"])

        assert result.exit_code == 0, result.output
        assert "1: Docs/Sub" in result.output
        assert "2: root" in result.output

    def test_path_unknown_file(self, runner, mock_client):
        """Test that an unknown file ID is reported and exits non-zero."""
        result = runner.invoke(main, ["-t", "token", "path", "nope"])

        assert result.exit_code == 1
        assert "nope" in result.output

    def test_path_json(self, runner, mock_client):
        """Test path output in JSON, with an unresolved parent."""
        files = {"1": file_resource("1", "h1", ["missing"])}
        mock_client.get_file.side_effect = lambda file_id, fields=None: (
            files[file_id] if file_id in files else get_file(file_id, fields)
        )

        result = runner.invoke(main, ["-t", "token", "--json", "path", "1"])

        assert result.exit_code == 1
        assert json.loads(result.output)["1"].startswith("<unresolved>")

    def test_path_client_error(self, runner):
        """Test that a client setup error is reported without a traceback."""
        with patch("pydrivedupes.cli.DriveClient") as mock_client_class:
            mock_client_class.side_effect = DriveConfigError("Access token not set")

            result = runner.invoke(main, ["-t", "token", "path", "1"])

        assert result.exit_code == 1
        assert "Access token not set" in result.output
        assert isinstance(result.exception, SystemExit)


class TestInitCommand:
    """Tests for the init command."""

    @patch("pydrivedupes.cli.save_credentials")
    @patch("pydrivedupes.cli.run_authorization_flow")
    def test_init(self, mock_flow, mock_save, runner, mock_client, tmp_path):
        """Test that init authorizes, saves the token and the secrets path."""
        secrets = tmp_path / "client.json"
        secrets.write_text("{}")
        creds = MagicMock(token="fresh")
        mock_flow.return_value = creds
        mock_client.get_about.return_value = {
            "user": {"emailAddress": "test@example.com"}
        }

        result = runner.invoke(main, ["init", "--credentials", str(secrets)])

        assert result.exit_code == 0, result.output
        assert "Initialization Complete" in result.output
        assert "test@example.com" in result.output
        mock_flow.assert_called_once_with(secrets, port=8080)
        mock_save.assert_called_once()
        assert "GDRIVE_CREDENTIALS_FILE" in (tmp_path / "config").read_text()

    def test_init_missing_client_secrets(self, runner):
        """Test init without a client secrets file."""
        result = runner.invoke(main, ["init"])

        assert result.exit_code == 1
        assert "Client secrets file not found" in result.output
