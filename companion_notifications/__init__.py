"""Django project package for the learning companion notification service."""
