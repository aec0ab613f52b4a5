"""NPC Interaction & Dialogue Core"""
__version__ = "0.1.0"
