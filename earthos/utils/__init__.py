"""
Утилиты EarthOS
"""
