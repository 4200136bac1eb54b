"""Cargo metadata and tooling."""
