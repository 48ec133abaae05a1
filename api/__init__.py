"""Ata Report HTTP API"""
