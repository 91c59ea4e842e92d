"""Dashboard domain - admin statistics, reports and the customer overview"""
