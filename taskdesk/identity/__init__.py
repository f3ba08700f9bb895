"""Identity: password hashing, access tokens, credential verification"""
