# Route modules: auth, users, stores, ratings, health
