"""Tests for the BosniaAir integration."""
