"""Call-target reduction: intersect static candidate sets with runtime evidence."""
