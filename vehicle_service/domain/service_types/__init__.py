"""Service types domain - the workshop service catalog"""
