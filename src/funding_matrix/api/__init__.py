"""HTTP surface: scheduler trigger and spread read endpoints."""
