"""Curriculum planning: objective trees and the artifacts derived from them."""
