"""Turn queue service: two-tier FIFO ticketing with next-in-line enforcement."""
