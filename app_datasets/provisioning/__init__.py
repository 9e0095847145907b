"""Provisioning workflow for app datasets"""
