"""Tests for the parallel digest pipeline."""
