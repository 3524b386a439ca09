"""Discounts domain - configurable discount rules and SMS campaigns"""
