"""
Web Service

Server-rendered login/register/logout and items CRUD pages backed by the
hosted auth + database service.
"""
