"""Products domain - retail products and stock"""
