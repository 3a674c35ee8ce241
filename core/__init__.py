"""
------------------------------------------------------------------------------
Project:        StackSnack
File:           core/__init__.py
Version:        1.0.0
Description:    Core logic package for StackSnack. Contains frame
                classification, view building, widget discovery and the
                reconciliation engine. Talks to the host only through the
                widget tree and host interfaces.
------------------------------------------------------------------------------
"""
