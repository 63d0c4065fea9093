"""Student Records terminal client"""
