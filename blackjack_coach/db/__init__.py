"""Persistence for the stats record"""
