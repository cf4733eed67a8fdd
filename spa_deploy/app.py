#!/usr/bin/env python3
"""CDK application entry point for single-page application sites."""

import logging
import sys
from pathlib import Path

# Add the project root to the Python path
sys.path.insert(0, str(Path(__file__).parent.parent))

import aws_cdk as cdk
import boto3

from spa_deploy.config import AppConfig
from spa_deploy.stacks.site_stack import SpaSiteStack


def get_account_id() -> str:
  """Get AWS account ID from current credentials."""
  sts = boto3.client("sts")
  return str(sts.get_caller_identity()["Account"])


def main(app: cdk.App | None = None) -> cdk.App:
  """Create CDK app with a stack for each configured site."""
  logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
  app = app or cdk.App()

  # Load configuration
  config_path = app.node.try_get_context("config") or "sites.yaml"
  config = AppConfig.from_yaml(Path(config_path))

  # Hosted zone lookups need an explicit account; only ask STS when a site lacks one
  account_id = None
  if any(site.account is None for site in config.sites):
    account_id = get_account_id()

  for site in config.sites:
    SpaSiteStack(
      app,
      f"SpaSite-{site.name}",
      site=site,
      global_config=config.global_config,
      env=cdk.Environment(
        account=site.account or account_id,
        region=site.region,
      ),
      description=f"Single-page application {site.name}",
    )

  app.synth()
  return app


if __name__ == "__main__":
  main()
