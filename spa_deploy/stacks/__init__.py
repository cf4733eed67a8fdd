"""CDK stacks for single-page application deployments."""

from .site_stack import SpaSiteStack

__all__ = ["SpaSiteStack"]
