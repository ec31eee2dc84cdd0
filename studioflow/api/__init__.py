"""HTTP API for editing and running workflows"""
