"""Dashboard domain - headline numbers and revenue analytics"""
