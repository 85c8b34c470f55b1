"""Utility functions for the backend."""

from towgo.utils.geo import haversine_distance, normalize_place, sort_businesses, with_distances

__all__ = ["haversine_distance", "normalize_place", "sort_businesses", "with_distances"]
