"""Services that build, write, validate and publish the chart scaffold."""
