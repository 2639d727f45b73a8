"""Deployment, verification and voting scripts for the Solythra contracts."""
