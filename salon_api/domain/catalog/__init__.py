"""Catalog domain - the salon service price list"""
