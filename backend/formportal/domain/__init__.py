"""Domain models, enums and errors for the approval workflow"""
