"""
Scaffold a NextJS + Strapi + Websocket stack from the NextWS template.
"""

__version__ = "1.0.0"
