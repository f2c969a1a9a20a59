"""SkyBrief weather briefing backend."""
