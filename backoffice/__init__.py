"""Small business back office: invoices, stock, party ledger and payments."""
