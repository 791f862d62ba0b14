"""Accounts app."""

