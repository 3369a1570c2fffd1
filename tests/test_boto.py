"""Tests for the boto3 client factory."""

from unittest.mock import patch

from s3compat.boto import addressing_style, build_s3_client
from s3compat.models import Credentials
from s3compat.providers import create_provider


class TestAddressingStyle:
    def test_path_style(self):
        assert addressing_style(create_provider("aws_s3", "us-east-1")) == "path"

    def test_virtual_hosted(self):
        assert addressing_style(create_provider("digitalocean_spaces", "nyc3")) == "virtual"


class TestBuildS3Client:
    """Tests for build_s3_client."""

    @patch("s3compat.boto.boto3.client")
    def test_client_configuration(self, mock_boto_client):
        """Endpoint, region and credentials come from the provider."""
        provider = create_provider("cloudflare_r2", "eu", account_id="abc123")
        credentials = Credentials("key", "secret", session_token="token")

        build_s3_client(provider, credentials)

        mock_boto_client.assert_called_once()
        args, kwargs = mock_boto_client.call_args
        assert args == ("s3",)
        assert kwargs["endpoint_url"] == "https://abc123.eu.r2.cloudflarestorage.com"
        assert kwargs["region_name"] == "auto"
        assert kwargs["aws_access_key_id"] == "key"
        assert kwargs["aws_secret_access_key"] == "secret"
        assert kwargs["aws_session_token"] == "token"

    @patch("s3compat.boto.boto3.client")
    def test_signature_and_addressing(self, mock_boto_client):
        build_s3_client(create_provider("digitalocean_spaces", "nyc3"), Credentials("k", "s"))

        config = mock_boto_client.call_args.kwargs["config"]
        assert config.signature_version == "s3v4"
        assert config.s3 == {"addressing_style": "virtual"}

    def test_real_client(self):
        """A real boto3 client is built against the provider endpoint."""
        provider = create_provider("generic_s3", endpoint="http://localhost:9000")

        client = build_s3_client(provider, Credentials("k", "s"))

        assert client.meta.endpoint_url == "http://localhost:9000"

    def test_exported_from_package(self):
        import s3compat

        assert s3compat.build_s3_client is build_s3_client
        assert "build_s3_client" in s3compat.__all__
