"""Customers domain - client records, visit statistics and discount eligibility"""
