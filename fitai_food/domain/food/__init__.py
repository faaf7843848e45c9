"""Food recognition domain: reference data, classification, matching, corrections."""
