"""Pytest fixtures for CDK construct tests."""

from pathlib import Path

import aws_cdk as cdk
import pytest


@pytest.fixture
def app() -> cdk.App:
  """Create a CDK App for testing."""
  return cdk.App()


@pytest.fixture
def stack(app: cdk.App) -> cdk.Stack:
  """Create a CDK Stack for testing.

  Account and region are explicit so hosted zone lookups can resolve.
  """
  return cdk.Stack(
    app,
    "TestStack",
    env=cdk.Environment(account="123456789012", region="us-east-1"),
  )


@pytest.fixture
def website_folder(tmp_path: Path) -> str:
  """Create a minimal built website to upload."""
  folder = tmp_path / "website"
  folder.mkdir()
  (folder / "index.html").write_text("<html><body><div id='app'></div></body></html>")
  (folder / "error.html").write_text("<html><body>Not found</body></html>")
  return str(folder)
