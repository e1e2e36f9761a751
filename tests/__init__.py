"""
SpawnAlarm Test Suite
"""
