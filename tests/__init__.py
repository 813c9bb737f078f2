"""Tests for batchinstall."""
