"""External collaborators: persistence and data transfer"""
