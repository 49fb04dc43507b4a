"""Test suite for analogbind."""
