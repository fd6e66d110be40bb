"""Tests for the statistics tables and the CSV report writer."""
