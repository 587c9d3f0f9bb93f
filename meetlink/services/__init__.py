"""
Services: Google API clients, meeting provisioning and request resolution.
"""
