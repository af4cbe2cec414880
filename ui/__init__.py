"""Web presentation of the clinic record collections."""
