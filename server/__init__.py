"""HTTP API for the Ovira health tracker."""
