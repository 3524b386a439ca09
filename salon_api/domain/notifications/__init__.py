"""Notifications domain - in-app notifications per user"""
