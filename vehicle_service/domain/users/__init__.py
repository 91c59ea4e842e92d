"""Users domain - the signed-in user profile"""
