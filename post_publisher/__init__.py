"""Publishes scheduled social posts to LinkedIn, Facebook and Instagram."""
