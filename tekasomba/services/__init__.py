"""Business operations shared by the HTTP routes and scripts."""
