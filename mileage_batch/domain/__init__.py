"""Pure result types for bulk settlement."""
