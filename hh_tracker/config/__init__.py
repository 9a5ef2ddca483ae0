"""Configuration for HH Tracker."""
