# Browse conversation states
SELECTING_CATEGORY, VIEWING_IMAGES = range(2)
