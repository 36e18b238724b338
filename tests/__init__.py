"""Tests for gitops-demo."""
