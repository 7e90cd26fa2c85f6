"""
Digital License Service Django project.
"""
