"""Interval - paid booking of creator time slots through Solana actions"""
