"""Engine — resolution, staleness, installation, coordination."""
