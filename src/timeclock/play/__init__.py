"""Page objects for the time clock pages, and their tests."""
