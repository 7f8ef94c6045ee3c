"""
Command-line front-ends: ``revgrad-diff`` and ``revgrad-lstm``.
"""
